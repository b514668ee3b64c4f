"""Image reference parsing."""

from ..core.types import ImageReference
from ..exceptions import ReferenceParseError


def parse_image_reference(reference: str) -> ImageReference:
    """Parse a ``repository/image`` string into its two parts.

    The rightmost path segment is the image name; everything before it is
    the repository namespace.

    Args:
        reference: Manifest entry (e.g., "biocontainers/samtools")

    Returns:
        ImageReference with repository and image set

    Raises:
        ReferenceParseError: If there is no separator or a part is empty

    Examples:
        parse_image_reference("rocker/tidyverse")
        # ImageReference(repository="rocker", image="tidyverse")
    """
    if not isinstance(reference, str):
        raise ReferenceParseError(f"Image reference must be a string: {reference!r}")

    reference = reference.strip()
    if "/" not in reference:
        raise ReferenceParseError(
            f"Image reference {reference!r} is not of the form repository/image"
        )

    repository, image = reference.rsplit("/", 1)
    if not repository or not image:
        raise ReferenceParseError(
            f"Image reference {reference!r} has an empty repository or image"
        )

    return ImageReference(repository=repository, image=image)
