from pathlib import Path

import pandas as pd
from filelock import FileLock
from flask import current_app

from models import Payment


COLUMNS = [
    "Reference",
    "Order",
    "Customer",
    "Email",
    "Phone",
    "Amount",
    "Status",
    "Booking",
    "Expires",
    "Created",
    "Updated",
]


def write_payments_to_excel() -> str:
    """
    Snapshot all payments into the configured Excel file.
    """
    output_path = Path(current_app.config["EXCEL_OUTPUT_PATH"])
    output_path.parent.mkdir(parents=True, exist_ok=True)

    lock = FileLock(str(output_path) + ".lock")

    try:
        payments = Payment.query.order_by(Payment.id.asc()).all()
        data = []
        for payment in payments:
            data.append(
                {
                    "Reference": payment.reference_no,
                    "Order": payment.order_no or "",
                    "Customer": payment.customer_name,
                    "Email": payment.customer_email,
                    "Phone": payment.customer_phone,
                    "Amount": payment.amount,
                    "Status": payment.status or "",
                    "Booking": payment.booking_id or "",
                    "Expires": payment.expire_date or "",
                    "Created": payment.created_at.isoformat() if payment.created_at else "",
                    "Updated": payment.updated_at.isoformat() if payment.updated_at else "",
                }
            )

        df = pd.DataFrame(data, columns=COLUMNS)

        with lock:
            df.to_excel(output_path, index=False, engine="openpyxl")
    except Exception:
        current_app.logger.exception("Failed to write payments Excel snapshot to %s", output_path)

    return str(output_path)
