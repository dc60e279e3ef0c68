# main.py
"""
Main entry point for the firefly swarm.

This script orchestrates the whole lifecycle:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Sets up the window, the swarm and the selection controller.
4. Runs the frame loop until the user quits.
5. Cancels pending transitions and shuts down cleanly.
"""
import logging
from utils import setup_logging, load_config, make_rng, FireflyConfig


def main():
    """
    The main function to run the swarm.
    """
    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config('config.json')
    except Exception as e:
        print(f"FATAL: Could not load config.json. Error: {e}")
        return

    setup_logging(config)

    logging.info("--- Firefly Swarm Starting ---")

    sim_params = config.get('simulation', {})
    run_params = config.get('run_control', {})
    vis_params = config.get('visualization', {})

    from controller import SelectionController
    from simulation import Simulation
    from visualization import Visualizer
    from constants import DEFAULT_STAR_COUNT
    import pygame

    # --- Component Initialization ---
    # 1. The visualizer decides the actual viewport size.
    visualizer = Visualizer(vis_params)
    width, height = visualizer.size

    # 2. The swarm and its controller use that size.
    rng = make_rng(sim_params.get('seed'))
    firefly_config = FireflyConfig.from_dict(sim_params)
    simulation = Simulation(
        firefly_config, width, height, rng,
        star_count=vis_params.get('star_count', DEFAULT_STAR_COUNT),
    )
    controller = SelectionController(simulation)

    log_throttle = run_params.get('log_throttle_steps', 100)
    max_steps = run_params.get('max_steps')

    running = True
    step_num = 0

    while running:
        now_ms = pygame.time.get_ticks()

        if not visualizer.handle_events(simulation, controller, now_ms):
            break

        controller.poll(now_ms)
        simulation.step(now_ms, visualizer.renderer)
        visualizer.renderer.finish_frame()
        visualizer.draw_hud(simulation, controller)
        visualizer.present()
        step_num += 1

        # Hot loops must throttle logs
        if step_num % log_throttle == 0:
            counts = simulation.population.state_counts()
            summary = ", ".join(f"{state.value}={n}" for state, n in counts.items())
            logging.info(f"Frame {step_num} | {len(simulation.population)} fireflies ({summary})")
            logging.debug(f"Frame {step_num} | FPS: {visualizer.clock.get_fps():.1f}")

        if max_steps is not None and step_num >= max_steps:
            logging.info(f"Reached max_steps ({max_steps}). Stopping.")
            running = False

    controller.shutdown()
    visualizer.close()
    logging.info("--- Firefly Swarm Shutting Down ---")


if __name__ == "__main__":
    main()
