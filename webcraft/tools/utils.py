#!/usr/bin/env python3
"""
Utility functions for the website builder
"""

import re
from datetime import datetime
from typing import Optional

from colorama import Fore, Style, init

# Initialize colorama for Windows support
init(autoreset=True)

class Logger:
    """Simple logger with color support"""

    @staticmethod
    def info(message):
        print(f"{Fore.CYAN}[*]{Style.RESET_ALL} {message}")

    @staticmethod
    def success(message):
        print(f"{Fore.GREEN}[+]{Style.RESET_ALL} {message}")

    @staticmethod
    def warning(message):
        print(f"{Fore.YELLOW}[!]{Style.RESET_ALL} {message}")

    @staticmethod
    def error(message):
        print(f"{Fore.RED}[!]{Style.RESET_ALL} {message}")

    @staticmethod
    def banner(message):
        print(f"\n{Fore.CYAN}{'='*60}")
        print(f"{message}")
        print(f"{'='*60}{Style.RESET_ALL}\n")


_FENCE_RE = re.compile(r"^```[\w-]*[ \t]*\r?\n(?P<body>.*?)\r?\n?```\s*$", re.DOTALL)


def strip_code_fences(text: Optional[str]) -> str:
    """Remove a markdown code fence wrapped around the whole text"""
    if not text:
        return ""
    text = text.strip()
    match = _FENCE_RE.match(text)
    if match:
        return match.group("body").strip()
    return text


def mask_secret(value: Optional[str], visible: int = 5) -> str:
    """Show only the first few characters of a credential"""
    if not value:
        return "No key"
    return value[:visible] + "..."


def get_timestamp():
    """Get current timestamp in ISO format"""
    return datetime.now().isoformat()
