# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import json
import logging
import os

import boto3

logger = logging.getLogger()
logger.setLevel(logging.INFO)

# Create Boto3 client (reusable across multiple invocations)
sns_client = boto3.client('sns')

# SNS rejects subjects longer than this
MAX_SUBJECT_LENGTH = 100


def handler(event, context):
    logger.info(json.dumps(event))

    alarm_sns = os.environ.get('ALARM_SNS')
    if not alarm_sns:
        raise RuntimeError("ALARM_SNS environment variable not found.")

    forwarded = 0
    for record in event.get('Records', []):
        notification = record['Sns']
        publish_args = {
            'TopicArn': alarm_sns,
            'Message': notification['Message'],
        }
        subject = notification.get('Subject')
        if subject:
            publish_args['Subject'] = subject[:MAX_SUBJECT_LENGTH]

        response = sns_client.publish(**publish_args)
        logger.info(f"Forwarded alarm to {alarm_sns}: {response['MessageId']}")
        forwarded += 1

    return {'forwarded': forwarded}
