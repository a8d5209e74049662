"""Application layer: the order wizard and the notification use-cases."""
