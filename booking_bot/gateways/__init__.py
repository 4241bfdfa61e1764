from booking_bot.gateways.base import Button, MessagingGateway

__all__ = ["Button", "MessagingGateway"]
