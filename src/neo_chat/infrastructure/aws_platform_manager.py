#!/usr/bin/env python3
# aws_platform_manager.py
"""
Helper functions for operations on the AWS platform.
"""

from __future__ import annotations

import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from neo_chat.app.errors import SecretAccessDenied, SecretNotFound, UpstreamUnavailable

ACCESS_DENIED_CODES = ("AccessDeniedException", "AccessDenied")
NOT_FOUND_CODES = ("ParameterNotFound", "ParameterVersionNotFound")

""" AWS Parameter Store """


def get_secret(secret_name: str, base_path: str, *, region_name: str = "us-east-1") -> str:
    """
    Read and decrypt the SecureString `<base_path>/<secret_name>`.

    Raises:
        SecretNotFound: If the parameter does not exist or is empty.
        SecretAccessDenied: If the caller may not read or decrypt it.
        UpstreamUnavailable: For any other AWS failure.
    """
    name = base_path.rstrip("/") + "/" + secret_name.lower()
    ssm = boto3.client("ssm", region_name=region_name)

    try:
        resp = ssm.get_parameter(Name=name, WithDecryption=True)
    except ClientError as e:
        code = e.response.get("Error", {}).get("Code", "")
        if code in NOT_FOUND_CODES:
            raise SecretNotFound(f"Secret not found: {name}") from e
        if code in ACCESS_DENIED_CODES:
            raise SecretAccessDenied(f"Access denied reading {name}") from e
        raise UpstreamUnavailable(f"SSM get_parameter failed: {e}") from e
    except BotoCoreError as e:
        raise UpstreamUnavailable(f"SSM get_parameter failed: {e}") from e

    value = resp.get("Parameter", {}).get("Value")
    if not value:
        raise SecretNotFound(f"Secret is empty: {name}")
    return value


""" AWS CloudWatch """


def create_logger(log_level: str = "INFO", logger_name: str = __name__) -> logging.Logger:
    """
    Create a logger for AWS Lambda that outputs to CloudWatch.

    Args:
        log_level (str): Logging level (e.g., "INFO", "DEBUG").
        logger_name (str): Name for the logger instance.

    Returns:
        logging.Logger: Configured logger instance.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)

    # Check if the logger already has handlers to avoid duplication
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        # CloudWatch adds its own timestamps
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        logger.addHandler(handler)

    return logger
