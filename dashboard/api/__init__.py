from . import completion_times, groups, sequence

__all__ = ['completion_times', 'groups', 'sequence']
