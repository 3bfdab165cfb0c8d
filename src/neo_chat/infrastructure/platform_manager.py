"""
Platform selection. NEO_CHAT_PLATFORM=aws reads secrets from SSM Parameter Store and logs
for CloudWatch; anything else reads secrets from the environment.
"""

import os

PLATFORM = os.getenv("NEO_CHAT_PLATFORM", "local").lower()

if PLATFORM == "aws":
    from neo_chat.infrastructure.aws_platform_manager import create_logger, get_secret
else:
    from neo_chat.infrastructure.local_platform_manager import create_logger, get_secret

__all__ = ["PLATFORM", "create_logger", "get_secret"]
