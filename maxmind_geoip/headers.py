"""
Request header vocabulary written by the GeoIP middleware
"""

X_COUNTRY = "X-MAXMIND-REQUEST-COUNTRY"
X_COUNTRY_ISO = "X-MAXMIND-REQUEST-COUNTRY-ISO"
X_STATE = "X-MAXMIND-REQUEST-STATE"
X_STATE_ISO = "X-MAXMIND-REQUEST-STATE-ISO"
X_CITY = "X-MAXMIND-REQUEST-CITY"
X_POSTAL = "X-MAXMIND-REQUEST-POSTAL-CODE"
X_LATITUDE = "X-MAXMIND-REQUEST-LATITUDE"
X_LONGITUDE = "X-MAXMIND-REQUEST-LONGITUDE"
X_LOCATION_ACCURACY = "X-MAXMIND-REQUEST-LOCATION-ACCURACY"
X_USER_TYPE = "X-MAXMIND-REQUEST-USER-TYPE"
X_CONNECTION_TYPE = "X-MAXMIND-REQUEST-CONNECTION-TYPE"
X_ISP = "X-MAXMIND-REQUEST-ISP"
X_PROXY_LEGAL = "X-MAXMIND-REQUEST-LEGAL-PROXY"
X_ANONYMOUS_IP = "X-MAXMIND-REQUEST-ANONYMOUS-IP"
X_ANONYMOUS_VPN = "X-MAXMIND-REQUEST-ANONYMOUS-VPN"
X_TOR = "X-MAXMIND-REQUEST-TOR-NODE"

# Written instead of attributes when the configured lookup type is unknown
X_ERROR = "X-MAXMIND-REQUEST-ERROR"

ENRICHMENT_HEADERS = (
    X_COUNTRY,
    X_COUNTRY_ISO,
    X_STATE,
    X_STATE_ISO,
    X_CITY,
    X_POSTAL,
    X_LATITUDE,
    X_LONGITUDE,
    X_LOCATION_ACCURACY,
    X_USER_TYPE,
    X_CONNECTION_TYPE,
    X_ISP,
    X_PROXY_LEGAL,
    X_ANONYMOUS_IP,
    X_ANONYMOUS_VPN,
    X_TOR,
)

RESERVED_HEADERS = ENRICHMENT_HEADERS + (X_ERROR,)
