"""Services coordinating repositories, Redis and outbound channels."""
