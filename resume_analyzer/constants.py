# Returned on every response of the analysis endpoint, preflight included.
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

EXTRACTION_ERROR_PREFIX = "Error accessing resume file"

PRESENT_WORDS = ("present", "current", "now")
