from .completion_client import CompletionClient
from .dispatcher import Dispatcher, TriggerRule, RuleKind

__all__ = ['CompletionClient', 'Dispatcher', 'TriggerRule', 'RuleKind']
