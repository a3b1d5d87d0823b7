import asyncio
import json
import logging
import uuid

logger = logging.getLogger(__name__)


def create_key(event, context, callback):
    """Completes through the callback, Node style"""
    logger.info(f"Creating key, {context.get_remaining_time_in_millis()}ms left")
    callback(None, {'id': str(uuid.uuid4()), 'owner': event.get('owner') if isinstance(event, dict) else None})


def hello(event, context):
    """
    This function processes an incoming event and returns a greeting.
    """
    if isinstance(event, dict) and event.get('name'):
        name = event['name']
    else:
        name = "World"

    message = f"Hello, '{name}' from local Lambda!"
    return {
        'statusCode': 200,
        'body': json.dumps(message)
    }


async def lookup_key(event, context):
    await asyncio.sleep(0.1)
    if not isinstance(event, dict) or 'id' not in event:
        raise KeyError('id')
    return {'id': event['id'], 'active': True}
