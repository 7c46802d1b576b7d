"""SmartBids analysis core: document extraction, schema-constrained generation and report metrics."""
