# Launch with: streamlit run streamlit_app.py
from steelops.app import main

main()
