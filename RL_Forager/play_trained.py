# Run from the repository root: python -m RL_Forager.play_trained
import time
from stable_baselines3 import PPO
from villagesim.forager_env import ForagerEnv
from RL_Forager.train_ppo import ENV_KWARGS

def main():
    env = ForagerEnv(render_mode="human", **ENV_KWARGS)
    model = PPO.load("ppo_forager")

    episodes = 5
    for ep in range(episodes):
        obs, info = env.reset()
        done = False
        total = 0.0

        while not done:
            action, _ = model.predict(obs, deterministic=True)
            obs, reward, terminated, truncated, info = env.step(int(action))
            done = terminated or truncated
            total += reward
            time.sleep(0.02)

        print(f"Episode {ep+1}: total_reward={total:.3f} moves={info['moves']} berries={info['berries']:.2f}")

    env.close()

if __name__ == "__main__":
    main()
