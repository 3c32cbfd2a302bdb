# Vulture whitelist: public API exercised only by tests and callers outside
# this package, which vulture incorrectly reports as unused.
#
# Run vulture with: vulture registry_exporter/ vulture_whitelist.py --min-confidence 80

# MetricsRegistry read API
get_sample_value  # unused method
families  # unused method

# Settings
is_production  # unused property

# socketserver hook overridden by TLSWSGIServer
process_request_thread  # unused method
