# Utils package for the boutique backend

# ruff: noqa: F403
from .transaction_utils import *
