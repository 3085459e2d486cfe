"""Configuration for the Tel Aviv bus lane status service"""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Base paths
BASE_DIR = Path(__file__).parent
DATA_DIR = Path(os.getenv("BUSLANES_DATA_DIR", BASE_DIR / "data"))
OUTPUT_DIR = Path(os.getenv("BUSLANES_OUTPUT_DIR", BASE_DIR / "output"))
LOGS_DIR = BASE_DIR / "logs"

# Create directories if they don't exist
DATA_DIR.mkdir(parents=True, exist_ok=True)
OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
LOGS_DIR.mkdir(parents=True, exist_ok=True)

# Tel Aviv municipality ArcGIS MapServer
ARCGIS_BASE_URL = os.getenv(
    "ARCGIS_BASE_URL",
    "https://gisn.tel-aviv.gov.il/arcgis/rest/services/IView2/MapServer"
)
BUS_LANES_LAYER = "611"  # Public transportation lanes
CAMERAS_LAYER = "949"    # Bus lane enforcement cameras

# API settings
REQUEST_TIMEOUT = 30
MAX_RETRIES = 3
RETRY_DELAY = 5
ARCGIS_PAGE_SIZE = 2000

# Local time for schedule evaluation
LOCAL_TIMEZONE = os.getenv("BUSLANES_TIMEZONE", "Asia/Jerusalem")

# Value of the feed's "status" attribute for lanes/cameras in service
ACTIVE_STATUS = "פעיל"

# Spatial thresholds (metres)
CAMERA_SNAP_RADIUS = 60
CAMERA_AMBIGUITY_THRESHOLD = 3
CAMERA_BIDIRECTIONAL_THRESHOLD = 10
SEGMENT_MATCH_RADIUS = 40
HEADING_SNAP_RADIUS = 30
CAMERA_ALERT_RADIUS = 100
STREET_DETECT_RADIUS = 200

# GPS low-pass filter
GPS_LP_ALPHA = 0.35
GPS_GOOD_ACCURACY = 15           # metres; worse fixes get half the alpha
GPS_MIN_SPEED_FOR_HEADING = 1.5  # m/s (~5.4 km/h)
GPS_MIN_MOVE_METERS = 3

# Driving alerts
ALERT_COOLDOWN_SECONDS = 300

# Refresh cadence
STATUS_REFRESH_SECONDS = 60
FEED_REFRESH_MINUTES = int(os.getenv("FEED_REFRESH_MINUTES", "30"))
REPORT_SYNC_MINUTES = 3

# Community reports: local cache + shared remote copy (Git hosting contents API)
REPORTS_FILE = DATA_DIR / "community_reports.json"
REPORTS_API_URL = os.getenv("REPORTS_API_URL", "https://api.github.com")
REPORTS_REPO = os.getenv("REPORTS_REPO", "")  # "owner/name"; empty disables sync
REPORTS_PATH = os.getenv("REPORTS_PATH", "data/community_reports.json")
REPORTS_BRANCH = os.getenv("REPORTS_BRANCH", "main")
REPORTS_TOKEN = os.getenv("REPORTS_TOKEN", "")
SYNC_MAX_RETRIES = 3

# Road routing (OSRM compatible), used by the driving simulator
OSRM_BASE_URL = os.getenv("OSRM_BASE_URL", "https://router.project-osrm.org")
SIM_SPEED_KMH = 75
SIM_CONNECTOR_MIN_GAP = 10  # metres between route items before asking the router
SIM_MIN_POINT_SPACING = 3   # metres

# Output settings
COMPRESS_OUTPUT = os.getenv("COMPRESS_OUTPUT", "false").lower() == "true"
