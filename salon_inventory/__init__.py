"""Salon chain inventory core: stock ledger, product batches, FIFO deduction and expiry tracking."""

__version__ = "1.0.0"
