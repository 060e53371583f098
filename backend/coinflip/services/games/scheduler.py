import time


def start_timeout_sweep(app, socketio, coordinator) -> bool:
    """Run the coordinator's timeout sweep in the background.

    - No-ops in TESTING mode unless ENABLE_SWEEP_IN_TESTS is set
    - Starts at most one worker per coordinator
    - A failing pass is logged and the loop keeps going
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SWEEP_IN_TESTS'):
        return False
    if coordinator.sweep_running:
        app.logger.info("[sweep-skip] worker already running")
        return False
    coordinator.sweep_running = True

    interval = float(app.config.get('SWEEP_INTERVAL_SEC', 1))
    heartbeat = int(app.config.get('TIMER_HEARTBEAT_SEC', 0))

    def _worker():
        app.logger.info(f"[sweep-start] interval={interval}s")
        passes = 0
        last_beat = time.time()
        while True:
            socketio.sleep(interval)
            passes += 1
            try:
                timed_out = coordinator.sweep()
            except Exception:
                app.logger.exception("[sweep-error] timeout pass failed")
                continue
            if timed_out:
                app.logger.info(f"[sweep] forfeited={[s.id for s in timed_out]}")
            if heartbeat > 0 and time.time() - last_beat >= heartbeat:
                last_beat = time.time()
                app.logger.info(
                    f"[sweep-heartbeat] passes={passes} active={len(coordinator.active_sessions())}"
                )

    socketio.start_background_task(_worker)
    return True
