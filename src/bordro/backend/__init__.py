"""Backend services for the Bordro payroll calculator."""
