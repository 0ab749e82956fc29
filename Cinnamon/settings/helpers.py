import re
from typing import Any

from dotenv import load_dotenv

# Keys whose values are credentials no matter where they appear in an event.
SENSITIVE_KEYS = {
    "authorization",
    "consumer_secret",
    "cinnamon_oauth_consumer_secret",
    "oauth_signature",
    "oauth_token_secret",
    "oauth_verifier",
    "secret",
    "secret_key",
}


def sentry_before_send(event: dict, hint: dict):
    """
    Callback for sentry's client-side event filtering.
    We're using it to mask OAuth secrets before events leave the process.
    https://docs.sentry.io/platforms/python/configuration/filtering/#filtering-error-events
    Parameters
    ----------
    event : dict
        Sentry event dictionary object
    hint : dict
        Source data dictionary used to create the event.
        https://docs.sentry.io/platforms/python/configuration/filtering/#using-hints
    Returns
    -------
    dict
        The modified event.
    """
    # We catch any exception, because if we don't, the event is dropped.
    # We want to keep passing them on so we can continually improve our scrubbing
    # while still sending events.
    # noinspection PyBroadException
    try:
        event = _scrub_event(event)
    except Exception:
        pass

    return event


def _mask_pattern(dirty: str):
    """
    Masks out known sensitive data from string.
    Parameters
    ----------
    dirty : str
        Input that may contain sensitive information.
    Returns
    -------
    str
        Output with any known sensitive information masked out.
    """
    # Form encoded secrets, as found in provider responses and query strings.
    form_secrets = re.compile(r"(oauth_(?:token_secret|verifier|signature))=[^&'\" ]+")
    clean = form_secrets.sub(r"\1=*****", dirty)
    # Quoted secrets, as found in Authorization headers.
    header_secrets = re.compile(r'(oauth_(?:signature|verifier))="[^"]*"')
    clean = header_secrets.sub(r'\1="*****"', clean)

    return clean


def _scrub_event(event_data: Any):
    """
    Recursively traverses sentry event data returns a scrubbed version.
    Parameters
    ----------
    event_data : Any
        Input that may contain sensitive information.
    Returns
    -------
    Any
        Output with any known sensitive information masked out.
    """
    # Basically cribbed from stackoverflow:
    # https://stackoverflow.com/a/38970181
    if isinstance(event_data, dict):
        items = list(event_data.items())
    elif isinstance(event_data, list):
        items = list(enumerate(event_data))
    elif isinstance(event_data, tuple):
        return tuple(_scrub_event(value) for value in event_data)
    elif isinstance(event_data, str):
        return _mask_pattern(event_data)
    else:
        return event_data

    for key, value in items:
        # When we can id sensitive data by the key, do a simple replacement.
        if isinstance(key, str) and key.lower() in SENSITIVE_KEYS:
            event_data[key] = "*****"
        # Otherwise, continue recursion.
        else:
            event_data[key] = _scrub_event(value)

    return event_data


def load_env_file(path: str):
    """
    Loads KEY=value lines from a .env file into os.environ, for local runs
    outside Docker. Variables already set in the environment (including Docker
    secrets loaded by manage.py) win over the file.
    Parameters
    ----------
    path : str
        Location of the .env file; a missing file is not an error.
    Returns
    -------
    bool
        True if at least one variable was read from the file.
    """
    return load_dotenv(path, override=False)
