import platform
from typing import Optional

from pageglot.core.managers.config_manager import ConfigManager, config_manager

# platform.system() -> the OS token a desktop Chrome reports
OS_TOKENS = {
    "Windows": "Windows NT 10.0; Win64; x64",
    "Darwin": "Macintosh; Intel Mac OS X 10_15_7",
    "Linux": "X11; Linux x86_64",
}


def generate_default_user_agent(config: Optional[ConfigManager] = None, os_name: Optional[str] = None) -> str:
    """
    Builds a desktop Chrome User-Agent for the current OS, using the
    Chrome version from 'user_agent.chrome_version'. Unknown systems
    present as Linux, since upstreams treat that as an ordinary browser.
    """
    os_part = OS_TOKENS.get(os_name or platform.system(), OS_TOKENS["Linux"])
    chrome_version = (config or config_manager).get_nested("user_agent.chrome_version", "120.0.0.0")

    return (
        f"Mozilla/5.0 ({os_part}) AppleWebKit/537.36 (KHTML, like Gecko) "
        f"Chrome/{chrome_version} Safari/537.36"
    )
