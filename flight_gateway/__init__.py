"""Amadeus GDS gateway: flight search, pricing, upselling and booking."""
