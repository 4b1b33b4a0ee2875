from workers_login.app import main

main()
