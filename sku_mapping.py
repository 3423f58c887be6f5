import json
import logging

logger = logging.getLogger(__name__)


class MappingLoadError(Exception):
    """mapping.json is missing or malformed"""


class SkuMapping:
    """Static Yandex offerId -> MoySklad product id lookup"""

    def __init__(self, mapping=None):
        self._mapping = dict(mapping or {})

    @classmethod
    def load(cls, path):
        logger.info("[MAPPING] Loading product mapping from %s", path)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise MappingLoadError(f"Mapping file not found: {path}") from e
        except json.JSONDecodeError as e:
            raise MappingLoadError(f"Mapping file is not valid JSON: {path}: {e}") from e

        if not isinstance(data, dict):
            raise MappingLoadError(f"Invalid mapping format in {path}: expected an object")

        mapping = cls(data)
        logger.info("[MAPPING] Product mapping loaded: %d SKU mappings", len(mapping))
        if not mapping:
            logger.warning("[MAPPING] Product mapping is empty!")
            logger.warning("[MAPPING] Run generate_mapping.py to build %s", path)
            logger.warning("[MAPPING] Server will start but every order will be skipped for unmapped SKUs")
        return mapping

    def resolve(self, sku):
        return self._mapping.get(sku)

    def __len__(self):
        return len(self._mapping)
