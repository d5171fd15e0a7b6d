from dataclasses import dataclass
from pathlib import Path
from dockhand.domain.errors import ManifestError
from dockhand.domain.value_objects.deployment_config import IMAGE_PLACEHOLDER
from dockhand.domain.value_objects.image_reference import ImageReference


@dataclass(frozen=True)
class ManifestTemplate:
    """
    Compose manifest with an image placeholder. Rendering is a single pass,
    so a placeholder-like sequence inside the image reference is never
    expanded a second time.
    """
    content: str
    source: str = "<memory>"

    def __post_init__(self):
        if IMAGE_PLACEHOLDER not in self.content:
            raise ManifestError(
                f"Manifest template {self.source} has no {IMAGE_PLACEHOLDER} placeholder"
            )

    @classmethod
    def load(cls, path: str) -> "ManifestTemplate":
        template_path = Path(path)
        try:
            content = template_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise ManifestError(f"Manifest template not found: {template_path}") from None
        except OSError as e:
            raise ManifestError(f"Cannot read manifest template {template_path}: {e}") from e
        return cls(content=content, source=str(template_path))

    @property
    def placeholder_count(self) -> int:
        return self.content.count(IMAGE_PLACEHOLDER)

    def render(self, image: ImageReference) -> str:
        return self.content.replace(IMAGE_PLACEHOLDER, str(image))
