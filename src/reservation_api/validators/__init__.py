from .group_validators import validate_group, check_group_size

__all__ = ["validate_group", "check_group_size"]
