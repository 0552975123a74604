"""
Allow running the agent as a module: python -m stat_agent
"""
from stat_agent.agent import main


if __name__ == '__main__':
    main()
