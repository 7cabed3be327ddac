"""Image file discovery for folder-based manifests."""

from pathlib import Path

IMAGE_EXTENSIONS: tuple[str, ...] = (".jpg", ".jpeg", ".png", ".bmp", ".tif", ".tiff")


def _is_hidden(path: Path, root: Path) -> bool:
    return any(part.startswith(".") for part in path.relative_to(root).parts)


def get_files(root: Path, extensions: tuple[str, ...] = IMAGE_EXTENSIONS) -> list[Path]:
    """Sorted image files under ``root``, searched recursively.

    Entries whose relative path has a dot-prefixed component (``.DS_Store``,
    ``._img.png`` resource forks, ``.cache/``) are skipped. Extension match
    is case-insensitive.
    """
    return sorted(
        p
        for p in root.rglob("*")
        if p.is_file() and p.suffix.lower() in extensions and not _is_hidden(p, root)
    )


def find_counterpart(
    path: Path,
    source_root: Path,
    target_root: Path,
    extensions: tuple[str, ...] = IMAGE_EXTENSIONS,
) -> Path | None:
    """Locate the file in ``target_root`` at the same relative path as ``path``.

    The exact name wins; otherwise any image with the same stem is accepted,
    so ``gray/cat.png`` pairs with ``original/cat.jpg``. Returns None when
    nothing matches.
    """
    relative = path.relative_to(source_root)
    exact = target_root / relative
    if exact.is_file():
        return exact
    for ext in extensions:
        for candidate in (exact.with_suffix(ext), exact.with_suffix(ext.upper())):
            if candidate.is_file():
                return candidate
    return None
