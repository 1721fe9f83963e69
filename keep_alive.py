# -*- coding: utf-8 -*-
import datetime
import logging
import os
import time
from threading import Thread

import requests
from flask import Flask, jsonify

logger = logging.getLogger(__name__)

SELF_PING_INTERVAL = 5 * 60
SELF_PING_FIRST_DELAY = 60

# ---------------------------
# Flask Keepalive Server
# ---------------------------
app = Flask(__name__)
START_TIME = time.time()

STATUS_PAGE = """<!DOCTYPE html>
<html>
<head>
    <title>Zynx Bot - Status</title>
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <style>
        body {{ font-family: 'Segoe UI', Tahoma, sans-serif; background: #5b5fc7; color: white;
               display: flex; align-items: center; justify-content: center; min-height: 100vh; }}
        .container {{ background: rgba(255, 255, 255, 0.1); border-radius: 20px; padding: 40px; text-align: center; }}
    </style>
</head>
<body>
    <div class="container">
        <h1>🤖 Zynx Bot</h1>
        <p>🟢 Online &amp; Running</p>
        <p>Uptime: {hours}h {minutes}m {seconds}s</p>
        <p>Type: Discord Ticket Bot</p>
        <p>Auto-Ping: {auto_ping}</p>
    </div>
</body>
</html>
"""


def uptime_seconds():
    return int(time.time() - START_TIME)


@app.route("/")
def home():
    uptime = uptime_seconds()
    return STATUS_PAGE.format(
        hours=uptime // 3600,
        minutes=(uptime % 3600) // 60,
        seconds=uptime % 60,
        auto_ping="✅ Active" if os.getenv("RENDER_EXTERNAL_URL") else "⏸️ Disabled",
    )


@app.route("/health")
def health():
    return jsonify(
        status="ok",
        uptime=uptime_seconds(),
        timestamp=datetime.datetime.now(datetime.timezone.utc).isoformat(),
    )


@app.route("/ping")
def ping():
    return "Pong! 🏓"


def self_ping(base_url):
    """Hits our own /health so the host doesn't put the service to sleep."""
    try:
        res = requests.get(f"{base_url.rstrip('/')}/health", timeout=10)
        logger.info("Self-ping successful - Status: %s", res.status_code)
        return res.status_code
    except requests.RequestException as e:
        logger.error("Self-ping failed: %s", e)
        return None


def _self_ping_loop(base_url):
    time.sleep(SELF_PING_FIRST_DELAY)
    while True:
        self_ping(base_url)
        time.sleep(SELF_PING_INTERVAL)


def run_flask(port=8080):
    app.run(host="0.0.0.0", port=port)


def keep_alive(port=8080):
    """Starts the status server, plus the self-ping loop when RENDER_EXTERNAL_URL is set."""
    Thread(target=run_flask, args=(port,), daemon=True).start()
    logger.info("Keep-Alive server running on port %s", port)

    external_url = os.getenv("RENDER_EXTERNAL_URL")
    if external_url:
        Thread(target=_self_ping_loop, args=(external_url,), daemon=True).start()
