"""
DHCP high availability blueprint.
"""
from flask import Blueprint

bp = Blueprint('dhcp', __name__, url_prefix='/api/dhcp')

from . import routes  # noqa
