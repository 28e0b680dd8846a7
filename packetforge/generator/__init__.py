"""Packetforge protocol code generator."""

from .codec import CodecBodies as CodecBodies
from .codec import build_codec as build_codec
from .config import GeneratorConfig as GeneratorConfig
from .layout import EncodingStrategy as EncodingStrategy
from .layout import Planner as Planner
from .layout import RecordLayout as RecordLayout
from .registry import RegistryPlan as RegistryPlan
from .registry import build_registry as build_registry
from .schema import *
from .types import *
