from flask import Blueprint, jsonify
from sqlalchemy import text
from attendance.extensions import db

base_bp = Blueprint("base", __name__)


@base_bp.route("/")
def home():
    return jsonify({"message": "Welcome to the attendance API!"})


@base_bp.route("/api/health")
def health():
    db.session.execute(text("SELECT 1"))
    return jsonify({"status": "ok"}), 200
