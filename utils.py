# utils.py

import json
import logging
import os
import pickle
import time
from typing import Any, Optional


def cache_data(data: Any, filename: str) -> None:
    """Cache data to a pickle file."""
    try:
        directory = os.path.dirname(filename)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(filename, 'wb') as f:
            pickle.dump(data, f)
        logging.info(f"Data cached to {filename}")
    except Exception as e:
        logging.error(f"Failed to cache data: {str(e)}")


def load_cached_data(filename: str, max_age: Optional[float] = None) -> Optional[Any]:
    """
    Load cached data from a pickle file.
    Returns None when the file is missing, unreadable, or older than max_age seconds.
    """
    try:
        with open(filename, 'rb') as f:
            data = pickle.load(f)
    except FileNotFoundError:
        logging.info(f"No cache file found: {filename}")
        return None
    except Exception as e:
        logging.error(f"Failed to load cache file {filename}: {e}")
        return None

    if max_age is not None:
        timestamp = float(data.get('timestamp', 0)) if isinstance(data, dict) else 0.0
        if time.time() - timestamp > max_age:
            logging.info(f"Cache {filename} is stale")
            return None

    logging.info(f"Loaded cached data from {filename}")
    return data


def cache_path(cache_dir: str, source_id: str) -> str:
    """Cache file for one source's activity pool."""
    safe_id = ''.join(c if c.isalnum() or c in '-_' else '_' for c in str(source_id))
    return os.path.join(cache_dir, f"{safe_id}.pkl")


def load_json(path: str) -> Optional[Any]:
    """Load a JSON file, logging failures."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except FileNotFoundError:
        logging.warning(f"File not found: {path}")
    except (json.JSONDecodeError, IOError) as e:
        logging.error(f"Failed to load {path}: {e}")
    return None


def get_cache_info(cache_file: str) -> dict:
    """Get information about a cache file."""
    info = {
        'exists': os.path.exists(cache_file),
        'filename': cache_file,
        'size': 0,
        'last_modified': None
    }

    if info['exists']:
        try:
            info['size'] = os.path.getsize(cache_file)
            info['last_modified'] = os.path.getmtime(cache_file)
        except Exception as e:
            logging.error(f"Failed to get cache file info: {str(e)}")

    return info
