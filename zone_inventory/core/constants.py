"""
Константы Zone Inventory.

RFC 1876 (LOC), порты по умолчанию, приватные обратные зоны.
"""

import ipaddress

# RFC 1876, Section 2
LOC_EQUATOR = 1 << 31
LOC_PRIMEMERIDIAN = 1 << 31
LOC_DEGREES = 60 * 60 * 1000  # миллиарксекунд в градусе
LOC_ALTITUDEBASE = 100000.0  # метров ниже уровня моря

# Значения по умолчанию для LOC записи (в сантиметрах)
LOC_DEFAULT_SIZE_CM = 10000
LOC_DEFAULT_HORIZ_PRE_CM = 5000
LOC_DEFAULT_VERT_PRE_CM = 5000

LOC_VERSION = 0

# Порты
DEFAULT_DNS_PORT = 53
DEFAULT_REMOTE_PORT = 9001

# TTL создаваемых записей, если не задан явно
DEFAULT_TTL = 3600

# TSIG
DEFAULT_TSIG_ALGORITHM = "hmac-md5"
TSIG_FUDGE = 300

# EDNS payload для больших ответов/обновлений
EDNS_PAYLOAD = 4096

# Приватные сети (RFC 1918) и их обратные зоны.
# Для 172.16.0.0/12 зона своя у каждой /16 сети.
PRIVATE_NETWORKS = (
    (ipaddress.ip_network("10.0.0.0/8"), "10.in-addr.arpa."),
    (ipaddress.ip_network("172.16.0.0/12"), None),
    (ipaddress.ip_network("192.168.0.0/16"), "168.192.in-addr.arpa."),
)
