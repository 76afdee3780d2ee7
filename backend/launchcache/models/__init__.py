from launchcache.models.launch import LaunchRecord as LaunchRecord, LaunchQueryResult as LaunchQueryResult
