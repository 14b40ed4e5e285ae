from .protocol import Subscription, TickCallback, TriggerSource
from .cron import CronSubscription, CronTrigger

__all__ = ["Subscription", "TickCallback", "TriggerSource", "CronSubscription", "CronTrigger"]
