"""
Application configuration settings.
"""
import os


class Config:
    """Base configuration."""
    # Product identity used when the system hostname is not configured
    PRODUCT_NAME = 'dhcpha'

    # CORS settings
    CORS_ORIGINS = ["https://home.arpa"]

    # File paths
    DHCPHA_CONFIG = os.environ.get('DHCPHA_CONFIG', '/etc/dhcpha/config.json')
    DHCPHA_LOG_DIR = '/var/log/dhcpha'
    DHCPHA_RUN_DIR = '/var/run/dhcpha'
    LOG_LEVEL = 'INFO'

    # Kea daemons
    KEA_CONFIG_DIR = '/etc/kea'
    KEA_CERT_DIR = '/etc/kea/certs'
    KEA_HOOKS_DIR = '/usr/lib/kea/hooks'
    KEA_SOCKET_DIR = '/run/kea'

    # Helper commands for dependent subsystems; the DHCP family ('v4'/'v6')
    # is appended to the DNS configure commands
    DNS_RESOLVER_CONFIGURE_COMMAND = ['/usr/bin/sudo', '/usr/local/sbin/dhcpha-unbound-configure.sh']
    DNS_FORWARDER_CONFIGURE_COMMAND = ['/usr/bin/sudo', '/usr/local/sbin/dhcpha-dnsmasq-configure.sh']
    FIREWALL_RELOAD_COMMAND = ['/usr/bin/sudo', '/usr/local/sbin/dhcpha-filter-reload.sh']
    ZONE_TRANSFER_RESYNC_COMMAND = ['/usr/bin/sudo', '/usr/local/sbin/dhcpha-bind-sync.sh']
    ZONE_TRANSFER_SUPPORT_FILE = '/usr/local/pkg/bind.inc'


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False
    LOG_LEVEL = 'DEBUG'


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = True
    TESTING = True
    # Use temporary directories for testing
    DHCPHA_CONFIG = '/tmp/dhcpha_test/config.json'
    DHCPHA_LOG_DIR = '/tmp/dhcpha_test/logs'
    DHCPHA_RUN_DIR = '/tmp/dhcpha_test/run'
    KEA_CONFIG_DIR = '/tmp/dhcpha_test/kea'
    KEA_CERT_DIR = '/tmp/dhcpha_test/kea/certs'
    KEA_SOCKET_DIR = '/tmp/dhcpha_test/kea'


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False


# Map environment names to config classes
config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
