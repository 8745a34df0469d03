from config.loader import get_config_loader

# Get the config loader instance
config = get_config_loader()

# OAuth application registration
# The redirect URI is a custom scheme registered with the OS; the desktop
# application receives it and hands it to CrowdinClient.handle_oauth_callback
CROWDIN_CLIENT_ID = config.get("CROWDIN_CLIENT_ID", "poedit-desktop")
CROWDIN_CLIENT_SECRET = config.get("CROWDIN_CLIENT_SECRET", "")
CROWDIN_AUTHORIZE_URL = config.get("CROWDIN_AUTHORIZE_URL", "https://accounts.crowdin.com/oauth/authorize")
CROWDIN_TOKEN_URL = config.get("CROWDIN_TOKEN_URL", "https://accounts.crowdin.com/oauth/token")
CROWDIN_REDIRECT_URI = config.get("CROWDIN_REDIRECT_URI", "poedit://auth/crowdin/")
CROWDIN_SCOPE = config.get("CROWDIN_SCOPE", "project")

# API endpoints
# Enterprise tokens carry a "domain" claim that selects the organization host
CROWDIN_API_BASE = config.get("CROWDIN_API_BASE", "https://api.crowdin.com/api/v2")
CROWDIN_ENTERPRISE_API_BASE = config.get("CROWDIN_ENTERPRISE_API_BASE", "https://{domain}.api.crowdin.com/api/v2")
CROWDIN_WEB_BASE = config.get("CROWDIN_WEB_BASE", "https://crowdin.com")
ATTRIBUTION_SOURCE = config.get("ATTRIBUTION_SOURCE", "poedit.net")
ATTRIBUTION_CAMPAIGN = config.get("ATTRIBUTION_CAMPAIGN", "poedit")

# Token storage: "keyring" (OS secret store) or "file"
TOKEN_STORAGE = config.get("TOKEN_STORAGE", "keyring")
TOKEN_FILE = config.get("TOKEN_FILE", "~/.crowdin-client/token.json")
KEYRING_SERVICE = config.get("KEYRING_SERVICE", "Crowdin")
KEYRING_USERNAME = config.get("KEYRING_USERNAME", "access_token")

# Timeout configuration
CONNECT_TIMEOUT = config.get("CONNECT_TIMEOUT", 10.0)
REQUEST_TIMEOUT = config.get("REQUEST_TIMEOUT", 60.0)
# File transfers can take much longer than metadata requests
TRANSFER_TIMEOUT = config.get("TRANSFER_TIMEOUT", 600.0)

# Crowdin caps list endpoints at 500 items per page
PAGE_SIZE = config.get("PAGE_SIZE", 500)

# Refresh tokens this many seconds before their recorded expiry
TOKEN_EXPIRY_MARGIN = config.get("TOKEN_EXPIRY_MARGIN", 60)

LOG_LEVEL = config.get("LOG_LEVEL", "info")
USER_AGENT = config.get("USER_AGENT", "crowdin-client/0.1.0")
