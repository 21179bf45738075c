# Run from the repository root: python -m RL_Forager.train_ppo
import argparse

from stable_baselines3 import PPO
from stable_baselines3.common.env_util import make_vec_env
from stable_baselines3.common.evaluation import evaluate_policy
from villagesim.forager_env import ForagerEnv

# Smaller maps keep a bush in reach early on; episodes run up to 300 moves
ENV_KWARGS = {"width": 150, "height": 150, "max_steps": 300}


def main():
    parser = argparse.ArgumentParser(description="Train PPO on the foraging environment")
    parser.add_argument("--timesteps", type=int, default=300_000)
    parser.add_argument("--envs", type=int, default=4)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--out", type=str, default="ppo_forager")
    args = parser.parse_args()

    env = make_vec_env(ForagerEnv, n_envs=args.envs, seed=args.seed, env_kwargs=ENV_KWARGS)

    # Energy rewards are small and delayed until a bush is reached:
    # long rollouts, a far horizon and some entropy to keep exploring
    model = PPO(
        "MlpPolicy",
        env,
        verbose=1,
        seed=args.seed,
        n_steps=1024,
        batch_size=256,
        n_epochs=10,
        gamma=0.995,
        gae_lambda=0.95,
        ent_coef=0.01,
        learning_rate=2.5e-4,
    )
    model.learn(total_timesteps=args.timesteps)
    model.save(args.out)
    env.close()
    print(f"Saved model to {args.out}.zip")

    eval_env = ForagerEnv(**ENV_KWARGS)
    mean_reward, std_reward = evaluate_policy(model, eval_env, n_eval_episodes=10, deterministic=True)
    eval_env.close()
    print(f"Evaluation over 10 episodes: energy change {mean_reward:.2f} +/- {std_reward:.2f}")


if __name__ == "__main__":
    main()
