from dataclasses import dataclass


@dataclass(slots=True)
class ActiveSwitch:
    # False marks an empty cell waiting for gravity or refill.
    active: bool = True
