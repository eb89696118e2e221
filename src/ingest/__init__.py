"""CSV upload ingestion.

This package reads uploaded CSV objects and publishes their rows
to the FIFO queue in fixed-size batches.
"""
