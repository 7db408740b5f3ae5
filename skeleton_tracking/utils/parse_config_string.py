def parse_config_string(config_string, task_id=None):
    """Parse connection string into dict with addr and option keys.

    ``kafka://localhost:9092,topic=raw_frames_{task_id},group_id=tracker``
    gives ``{'addr': 'kafka://localhost:9092', 'topic': 'raw_frames_cam1', ...}``.
    """
    config = {}

    # Split by comma and parse key=value pairs
    parts = config_string.split(',')
    base_url = parts[0].strip()  # First part is the base URL

    # Extract address from URL (protocol://host:port)
    config['addr'] = base_url
    if '://' in base_url:
        config['protocol'], config['location'] = base_url.split('://', 1)
    else:
        config['protocol'], config['location'] = '', base_url

    # Parse remaining parameters
    for part in parts[1:]:
        if '=' in part:
            key, value = part.split('=', 1)
            if task_id:
                value = value.replace('{task_id}', str(task_id))
            config[key.strip()] = value.strip()

    return config
