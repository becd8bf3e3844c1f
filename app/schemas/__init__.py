from .common import CamelModel
