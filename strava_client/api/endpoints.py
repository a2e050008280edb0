"""
Strava API endpoint definitions.

Documentation: https://developers.strava.com/docs/reference/
"""

API_BASE_URL = "https://www.strava.com/api/v3"

# OAuth Endpoints
APP_AUTHORIZATION_URL = "strava://oauth/mobile/authorize"
WEB_AUTHORIZATION_URL = "https://www.strava.com/oauth/mobile/authorize"
TOKEN_URL = "https://www.strava.com/oauth/token"

# Athlete Endpoints
ATHLETE = "/athlete"
ATHLETE_ACTIVITIES = "/athlete/activities"

# Activity Endpoints
ACTIVITY = "/activities/{activity_id}"

# Upload Endpoints
UPLOADS = "/uploads"
UPLOAD = "/uploads/{upload_id}"
