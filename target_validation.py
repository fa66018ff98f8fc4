import os
import pathlib
from dataclasses import dataclass
from typing import Optional

MAX_PATH_LENGTH = 4096
MAX_FILE_SIZE = 100 * 1024 * 1024  # 100MB


@dataclass
class ValidationResult:
    is_valid: bool
    reason: str
    file_path: Optional[str] = None


def validate_target(target_path: str, max_file_size: int = MAX_FILE_SIZE,
                    allow_large: bool = False) -> ValidationResult:
    """
    Check that the target is a single readable, non-empty regular file.

    Every prefix of the target gets written to disk and scanned, so size is
    capped unless allow_large is set.
    """
    path_str = str(target_path)
    if len(path_str) > MAX_PATH_LENGTH:
        return ValidationResult(
            is_valid=False,
            reason=f"Path too long ({len(path_str)} > {MAX_PATH_LENGTH} chars)"
        )

    path = pathlib.Path(target_path)

    # Checked before resolve(), which would follow the link
    if path.is_symlink():
        return ValidationResult(is_valid=False, reason="Symbolic link (security risk)")

    try:
        resolved_path = path.resolve()
    except (OSError, RuntimeError) as e:
        return ValidationResult(is_valid=False, reason=f"Path resolution failed: {e}")

    if not resolved_path.exists():
        return ValidationResult(is_valid=False, reason="Path does not exist")

    if not resolved_path.is_file():
        return ValidationResult(is_valid=False, reason="Not a regular file")

    if not os.access(resolved_path, os.R_OK):
        return ValidationResult(is_valid=False, reason="Permission denied (cannot read file)")

    try:
        file_size = resolved_path.stat().st_size
    except OSError as e:
        return ValidationResult(is_valid=False, reason=f"Could not stat file: {e}")

    if file_size == 0:
        return ValidationResult(is_valid=False, reason="Empty file (0 bytes)")

    if not allow_large and file_size > max_file_size:
        size_mb = file_size / (1024 * 1024)
        limit_mb = max_file_size / (1024 * 1024)
        return ValidationResult(
            is_valid=False,
            reason=f"File too large ({size_mb:.1f}MB > {limit_mb:.1f}MB limit)"
        )

    return ValidationResult(
        is_valid=True,
        reason="File validation passed",
        file_path=str(resolved_path)
    )
