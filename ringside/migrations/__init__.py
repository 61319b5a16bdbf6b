from .runner import Migration, MigrationRunner, MigrationStatus
