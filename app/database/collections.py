from ..core.config import settings

# Collection Names
COLLECTIONS = {
    'water_sources': settings.WATER_SOURCES_COLLECTION,
    'reports': settings.REPORTS_COLLECTION,
}

# Collection Structure Documentation
COLLECTION_SCHEMAS = {
    'water_sources': {
        # lastUpdated is either epoch milliseconds or a Firestore timestamp
        'fields': ['name', 'type', 'location', 'status', 'lastUpdated'],
        'required': ['name'],
        'indexes': ['name']
    },
    'reports': {
        'fields': ['sourceName', 'issue', 'timestamp'],
        'required': ['sourceName', 'issue', 'timestamp'],
        'indexes': []
    },
}
