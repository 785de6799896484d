"""
Global configuration.
"""


import confuse

config = confuse.Configuration("bucket_stream", __name__)
"""
Configuration for the package. Defaults are loaded from
`config_default.yaml`, and can be overridden in the user's configuration
directory or with the `BUCKET_STREAMDIR` environment variable.
"""
