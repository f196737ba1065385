"""
pgext_installer — package a compiled PostgreSQL extension for installation.

Build the extension, locate its shared library, concatenate the SQL
fragments named in sql/load-order.txt into {extname}--{version}.sql and
copy everything into the pg_config layout, optionally under a staging root.
"""

__version__ = "0.1.0"
INSTALLER_VERSION = "v1"
PACKAGE_NAME = "pgext_installer"
SCHEMA_VERSION = "0.1"
