"""Единое место для peewee-Proxy ``db``.

Привязка к реальной базе выполняется в :mod:`database.init`.
"""

from peewee import Proxy

db = Proxy()
