"""Utility helpers for the exporter."""

from .identifiers import stable_uuid, safe_path_segment
from .json_encoder import ModelJSONEncoder, model_to_dict, to_json

__all__ = ['stable_uuid', 'safe_path_segment', 'ModelJSONEncoder', 'model_to_dict', 'to_json']
