"""
FinishLine
SQLAlchemy extension instance shared by every model module.

Usage:
    from finishline.models import db
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
