"""
Platform-specific helpers for creating the password data file securely.

The data file holds salted password hashes, so it is created readable by the
owner only.

Platform-specific security notes:
- Windows: Uses an ACL granting the current process owner full control
- POSIX: Uses file mode bits (0600 for data files, 0700 for dirs)
"""

import os
import sys
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)

DATA_FILE_MODE = 0o600
DATA_DIR_MODE = 0o700


def create_secure_file(path: Path) -> None:
    """
    Create a file with owner-only permissions appropriate for the platform.

    Existing files keep their content; only permissions are tightened.

    Args:
        path: Path object representing the file to create

    Raises:
        OSError: If file creation fails
        PermissionError: If setting permissions fails
    """
    path.parent.mkdir(mode=DATA_DIR_MODE, parents=True, exist_ok=True)

    if sys.platform == "win32":
        import ntsecuritycon as con
        import win32security

        path.touch(exist_ok=True)
        security = win32security.GetFileSecurity(
            str(path), win32security.DACL_SECURITY_INFORMATION
        )
        token = win32security.OpenProcessToken(
            win32security.GetCurrentProcess(),
            win32security.TOKEN_QUERY
        )
        sid = win32security.GetTokenInformation(
            token, win32security.TokenUser)[0]

        dacl = win32security.ACL()
        dacl.AddAccessAllowedAce(
            win32security.ACL_REVISION,
            con.FILE_ALL_ACCESS,
            sid
        )
        security.SetSecurityDescriptorDacl(1, dacl, 0)
        win32security.SetFileSecurity(
            str(path),
            win32security.DACL_SECURITY_INFORMATION,
            security
        )
    else:
        fd = os.open(str(path), os.O_WRONLY | os.O_CREAT, DATA_FILE_MODE)
        os.close(fd)
        os.chmod(path, DATA_FILE_MODE)


def ensure_secure_permissions(path: Path) -> None:
    """
    Ensure a file has secure permissions, falling back to basic creation if needed.

    Args:
        path: Path object representing the file to secure
    """
    try:
        create_secure_file(path)
    except (OSError, PermissionError) as e:
        logger.warning("secure_permissions_failed", path=str(path), error=str(e))
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(exist_ok=True)
