"""
ThreadRest Path Constants

Always use get_real_user_home() instead of Path.home() for per-user
files: the gateway usually runs under sudo (it needs the Thread
interface), and Path.home() would then point at /root.
"""

from pathlib import Path
import os


def get_real_user_home() -> Path:
    """
    Get the real user's home directory, even when running as root via sudo.

    Returns:
        Path to the real user's home directory
    """
    sudo_user = os.environ.get('SUDO_USER')
    if sudo_user and sudo_user != 'root':
        return Path(f'/home/{sudo_user}')
    return Path.home()


class ThreadRestPaths:
    """Per-user locations for the gateway"""

    @classmethod
    def get_config_dir(cls) -> Path:
        return get_real_user_home() / '.config' / 'threadrest'

    @classmethod
    def get_config_file(cls) -> Path:
        return cls.get_config_dir() / 'rest.json'

    @classmethod
    def get_log_dir(cls) -> Path:
        return get_real_user_home() / '.local' / 'share' / 'threadrest' / 'logs'
