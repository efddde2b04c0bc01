"""
Default CSV dialect and identity rules.

This file exists to keep the defaults shared by parser, serializer and store in one place.
"""

DEFAULT_DELIMITER = ","
DEFAULT_NEWLINE = "\r\n"  # CRLF as per RFC 4180
DEFAULT_ID_PROPERTY = "id"

# Key holding the sequential identity when no identity property is configured
AUTO_ID_PROPERTY = "__id"

QUOTE = '"'
ESCAPED_QUOTE = '""'
