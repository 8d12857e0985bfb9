"""Gunicorn configuration to ensure each worker has a fleet snapshot."""
import os
import sys

# Gunicorn config variables
bind = f"{os.getenv('FLEET_HOST', '0.0.0.0')}:{os.getenv('FLEET_PORT', '8080')}"
workers = 2
timeout = 120
worker_class = "sync"
preload_app = False  # Don't preload - let each worker import fresh

def post_worker_init(worker):
    """Called just after a worker has initialized the application."""
    try:
        # Import here to avoid circular imports
        from app import seed_state

        app = worker.app.wsgi()
        state = app.config.get('fleet_state') if hasattr(app, 'config') else None
        if state is None:
            print(f"[Worker {worker.pid}] WARNING: No fleet state found in app.config", file=sys.stderr, flush=True)
            return
        seed_state(state)
        print(f"[Worker {worker.pid}] Fleet state has {len(state.snapshot.nodes)} nodes", file=sys.stderr, flush=True)
    except Exception as e:
        print(f"[Worker {worker.pid}] ERROR in post_worker_init: {e}", file=sys.stderr, flush=True)
        import traceback
        traceback.print_exc(file=sys.stderr)
