"""File summary pipeline: validate, classify, exchange, fetch, sign."""
