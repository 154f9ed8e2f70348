from devpod_k8s.cli import main

main()
