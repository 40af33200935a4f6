"""Services for Photoshelf."""

from photoshelf.services.record_store import RecordStore
from photoshelf.services.geocoder import Geocoder
from photoshelf.services.metadata_extractor import MetadataExtractor, ExtractedPhoto, is_image_file
from photoshelf.services.merge import upsert_extracted, merge_extracted, clean_device_tags
from photoshelf.services.query import PhotoFilters, PhotoPage, query_photos, search_photos
from photoshelf.services.aggregation import collection_stats, count_locations, count_people, count_tags

__all__ = [
    "RecordStore",
    "Geocoder",
    "MetadataExtractor",
    "ExtractedPhoto",
    "is_image_file",
    "upsert_extracted",
    "merge_extracted",
    "clean_device_tags",
    "PhotoFilters",
    "PhotoPage",
    "query_photos",
    "search_photos",
    "collection_stats",
    "count_locations",
    "count_people",
    "count_tags",
]
