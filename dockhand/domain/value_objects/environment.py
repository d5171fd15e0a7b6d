from enum import Enum


class Environment(Enum):
    """
    Target environment of a release. Each environment has its own image
    repository on the registry.
    """
    DEV = "dev"
    PROD = "prod"

    @property
    def repository(self) -> str:
        return f"e-commerce-{self.value}"

    @classmethod
    def parse(cls, value: str) -> "Environment":
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(e.value for e in cls)
            raise ValueError(
                f"Unknown environment {value!r} (expected one of: {choices})"
            ) from None

    def __str__(self) -> str:
        return self.value
