"""Inspector de paquetes Android (APK / XAPK)"""

__version__ = "1.0.0"
