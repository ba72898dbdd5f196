"""User-data script that turns a fresh Ubuntu instance into a channel origin.

Layout on the instance:
- NGINX RTMP ingest on :1935 (`/live/{channel_id}`), writing HLS segments
- NGINX HTTP on :8000 serving `/hls/` and proxying `/api/` and `/health` to
  the Node transcoding service on :3000
- a minimal status server on :8080 answering `/health`
"""

from app.schemas.hls_settings import HlsSettings

from .endpoints import HTTP_PORT, RTMP_PORT, STATUS_SERVER_PORT

TRANSCODER_PORT = 3000


def generate_bootstrap_script(
    channel_id: str,
    hls_settings: HlsSettings,
    transcoding_repo_url: str,
) -> str:
    segment_length = max(1, hls_settings.segment_length)
    # playlist window sized to the DVR duration (minutes)
    playlist_length = max(segment_length, hls_settings.dvr_duration * 60)
    renditions = ",".join(
        f"{p.name}:{p.resolution}:{p.bitrate}:{p.fps}"
        for p in hls_settings.quality_profiles
        if p.enabled
    )

    return f"""#!/bin/bash
set -e
exec > >(tee /var/log/user-data.log|logger -t user-data -s 2>/dev/console) 2>&1

echo "=== StreamFlow setup for channel {channel_id} ==="

apt-get update -y
apt-get install -y nginx libnginx-mod-rtmp ffmpeg git curl build-essential python3

curl -fsSL https://deb.nodesource.com/setup_lts.x | bash -
apt-get install -y nodejs

mkdir -p /var/www/hls/{channel_id}
chown -R www-data:www-data /var/www/hls

cat >/etc/nginx/modules-enabled/99-rtmp.conf <<'EOF'
rtmp {{
    server {{
        listen {RTMP_PORT};
        application live {{
            live on;
            record off;
            hls on;
            hls_path /var/www/hls/{channel_id};
            hls_fragment {segment_length}s;
            hls_playlist_length {playlist_length}s;
            hls_nested off;
            on_publish http://127.0.0.1:{TRANSCODER_PORT}/hooks/publish;
            on_publish_done http://127.0.0.1:{TRANSCODER_PORT}/hooks/publish_done;
        }}
    }}
}}
EOF

cat >/etc/nginx/sites-available/streamflow <<'EOF'
server {{
    listen {HTTP_PORT};
    location /hls/ {{
        types {{ application/vnd.apple.mpegurl m3u8; video/mp2t ts; }}
        alias /var/www/hls/;
        add_header Cache-Control no-cache;
        add_header Access-Control-Allow-Origin *;
    }}
    location /api/ {{
        proxy_pass http://127.0.0.1:{TRANSCODER_PORT};
    }}
    location /health {{
        proxy_pass http://127.0.0.1:{TRANSCODER_PORT}/health;
    }}
}}
EOF
ln -sf /etc/nginx/sites-available/streamflow /etc/nginx/sites-enabled/streamflow
systemctl restart nginx

mkdir -p /home/ubuntu/projects
cd /home/ubuntu/projects
git clone {transcoding_repo_url} node-transcoding
cd node-transcoding
npm install

cat >/etc/systemd/system/node-transcoding.service <<'EOF'
[Unit]
Description=Node Transcoding Service
After=network.target

[Service]
User=ubuntu
Group=ubuntu
WorkingDirectory=/home/ubuntu/projects/node-transcoding
ExecStart=/usr/bin/npm start
Restart=on-failure
Environment=NODE_ENV=production
Environment=PORT={TRANSCODER_PORT}
Environment=CHANNEL_ID={channel_id}
Environment=HLS_RENDITIONS={renditions}
Environment=HLS_VTT_ENABLED={str(hls_settings.vtt_enabled).lower()}

[Install]
WantedBy=multi-user.target
EOF

cat >/etc/systemd/system/streamflow-status.service <<'EOF'
[Unit]
Description=StreamFlow status server
After=network.target

[Service]
ExecStart=/usr/bin/python3 -c "import http.server as h; h.HTTPServer(('', {STATUS_SERVER_PORT}), type('H', (h.BaseHTTPRequestHandler,), {{'do_GET': lambda s: (s.send_response(200 if s.path == '/health' else 404), s.end_headers(), s.wfile.write(b'OK'))}})).serve_forever()"
Restart=always

[Install]
WantedBy=multi-user.target
EOF

chown -R ubuntu:ubuntu /home/ubuntu/projects
systemctl daemon-reload
systemctl enable --now node-transcoding.service
systemctl enable --now streamflow-status.service

echo "=== StreamFlow setup complete ==="
"""
