"""Application layer: stream lifecycle, post view engine and use cases."""
