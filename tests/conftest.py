"""Shared pytest fixtures for synthesizing the auditor's constructs."""

import os
from pathlib import Path

import pytest
from aws_cdk import App, Stack

from lib.config import AuditorConfig

PROJECT_ROOT = Path(__file__).parent.parent

# Prevent boto3 clients created at import time from needing real credentials
for key, value in {
    "AWS_DEFAULT_REGION": "us-east-1",
    "AWS_ACCESS_KEY_ID": "testing",
    "AWS_SECRET_ACCESS_KEY": "testing",
    "CDK_DISABLE_VERSION_CHECK": "true",
}.items():
    os.environ.setdefault(key, value)


@pytest.fixture(autouse=True)
def project_root(monkeypatch):
    """Asset paths are relative to the project root, as they are under `cdk synth`."""
    monkeypatch.chdir(PROJECT_ROOT)
    return PROJECT_ROOT


@pytest.fixture
def auditor_config():
    return AuditorConfig(
        s3_bucket="example-cloudmapper",
        iam_role="cloudmapper-audit",
        alarm_sns_arn="arn:aws:sns:us-east-1:123456789012:security-alarms",
    )


@pytest.fixture
def stack():
    return Stack(App(), "TestStack")
