# Run from the repository root: python -m RL_Forager.random_play
import time
from villagesim.forager_env import ForagerEnv

def main():
    env = ForagerEnv(render_mode="human")
    obs, info = env.reset()

    while True:
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        time.sleep(0.01)
        if terminated or truncated:
            print(f"Episode over: moves={info['moves']} energy={info['energy']:.2f}")
            obs, info = env.reset()

if __name__ == "__main__":
    main()
